"""Headless turtle rendering constants."""

BRANCH_LENGTH = 2.0  # Length of one forward move
DEFAULT_ANGLE = 25.0  # Turn angle (degrees) when a genome carries none
INITIAL_HEADING = 90.0  # Degrees; trees grow along +Y
