class MazeRaceError(Exception):
    """Base class for everything this package raises on purpose."""


class ConfigError(MazeRaceError, ValueError):
    """Raised when a RaceConfig cannot describe a playable race."""


class OutOfBoundsError(MazeRaceError, IndexError):
    """Raised when a grid lookup falls outside the grid."""

    def __init__(self, row, col, rows, cols):
        super().__init__(f"cell ({row}, {col}) is outside a {rows}x{cols} grid")
        self.row = row
        self.col = col
