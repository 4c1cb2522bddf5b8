"""2D FDFD solver for the transmission of photonic waveguide devices."""
LOG_FORMAT = "[%(asctime)-15s][%(levelname)s][%(module)s][%(funcName)s] %(message)s"
