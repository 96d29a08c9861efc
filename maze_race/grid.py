from collections import namedtuple

from maze_race.errors import OutOfBoundsError

# (row, col) pair; x is the row, y the column
Position = namedtuple("Position", ["x", "y"])

# Expansion order used by the generator and every runner: down, up, right, left
DIRECTIONS = ((1, 0), (-1, 0), (0, 1), (0, -1))


class Cell:
    __slots__ = ("is_obstacle", "visited")

    def __init__(self, is_obstacle=True, visited=False):
        self.is_obstacle = is_obstacle
        self.visited = visited

    def __repr__(self):
        return f"Cell(is_obstacle={self.is_obstacle}, visited={self.visited})"


class Grid:
    """
    A rows x cols rectangle of cells addressed by (row, col).

    Grid Representation:
      - self.cells is a list of rows, each a list of Cell objects.
      - is_obstacle is structural: set while carving, shared by every clone.
      - visited is search-local: each runner works on its own clone(), which
        copies obstacles and resets visitation.

    Every accessor validates bounds first and raises OutOfBoundsError instead
    of letting Python wrap negative indices around.
    """
    def __init__(self, rows, cols, fill_obstacle=True):
        self.rows = rows
        self.cols = cols
        self.cells = [[Cell(fill_obstacle) for _ in range(cols)] for _ in range(rows)]

    @classmethod
    def from_strings(cls, lines):
        """Build a grid from text rows, '#' for obstacles and anything else open."""
        lines = [line for line in lines if line]
        grid = cls(len(lines), len(lines[0]) if lines else 0)
        for r, line in enumerate(lines):
            for c, ch in enumerate(line):
                grid.cells[r][c].is_obstacle = ch == "#"
        return grid

    def in_bounds(self, row, col):
        return 0 <= row < self.rows and 0 <= col < self.cols

    def cell(self, row, col):
        if not self.in_bounds(row, col):
            raise OutOfBoundsError(row, col, self.rows, self.cols)
        return self.cells[row][col]

    def is_obstacle(self, row, col):
        return self.cell(row, col).is_obstacle

    def is_visited(self, row, col):
        return self.cell(row, col).visited

    def set_obstacle(self, row, col, value):
        self.cell(row, col).is_obstacle = value

    def mark_visited(self, row, col):
        self.cell(row, col).visited = True

    def is_open(self, row, col):
        """True when (row, col) is in bounds, not an obstacle and not yet visited."""
        if not self.in_bounds(row, col):
            return False
        cell = self.cells[row][col]
        return not cell.is_obstacle and not cell.visited

    def neighbors(self, pos, distance=1):
        """Yield in-bounds positions `distance` cells away, in DIRECTIONS order."""
        for dx, dy in DIRECTIONS:
            nx, ny = pos[0] + dx * distance, pos[1] + dy * distance
            if self.in_bounds(nx, ny):
                yield Position(nx, ny)

    def open_cells(self):
        return [Position(r, c) for r in range(self.rows) for c in range(self.cols)
                if not self.cells[r][c].is_obstacle]

    def visited_cells(self):
        return [Position(r, c) for r in range(self.rows) for c in range(self.cols)
                if self.cells[r][c].visited]

    def reset_visited(self):
        for row in self.cells:
            for cell in row:
                cell.visited = False

    def clone(self):
        """Deep copy that keeps obstacles and clears every visited flag."""
        copy = Grid(self.rows, self.cols)
        for r, row in enumerate(self.cells):
            for c, cell in enumerate(row):
                copy.cells[r][c].is_obstacle = cell.is_obstacle
        return copy

    def __str__(self):
        return "\n".join(
            "".join("#" if cell.is_obstacle else ("*" if cell.visited else ".") for cell in row)
            for row in self.cells
        )
