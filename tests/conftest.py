import pytest

from tiling_tools.IsohedralOracle import (
    EdgeShape, IsohedralOracle, Placement, TilingDescriptor, TilingLibrary,
)

UNIT_SQUARE = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]


class FakeOracle(IsohedralOracle):
    """Oracle with a fixed descriptor and a fixed placement list."""

    def __init__(self, descriptor, placements=(), parameter_count=0):
        self._descriptor = descriptor
        self._placements = list(placements)
        self.parameters = [0.5] * parameter_count
        self.regions = []

    def descriptor(self):
        return self._descriptor

    def num_parameters(self):
        return len(self.parameters)

    def set_parameters(self, values):
        self.parameters = list(values)

    def fill_region(self, xmin, ymin, xmax, ymax):
        self.regions.append((xmin, ymin, xmax, ymax))
        return iter(self._placements)


class FakeLibrary(TilingLibrary):
    def __init__(self, make_oracle, count=1):
        self.make_oracle = make_oracle
        self.count = count
        self.created = []

    def num_types(self):
        return self.count

    def create(self, index):
        self.created.append(index)
        return self.make_oracle(index)


@pytest.fixture
def square_descriptor():
    return TilingDescriptor(UNIT_SQUARE, [EdgeShape.S] * 4, num_parameters=0, num_aspects=2)


@pytest.fixture
def straight_square_descriptor():
    return TilingDescriptor(UNIT_SQUARE, [EdgeShape.I] * 4, num_parameters=0, num_aspects=2)


@pytest.fixture
def two_placements():
    return [
        Placement((1, 0, 0, 0, 1, 0), aspect=0),
        Placement((1, 0, 1, 0, 1, 0), aspect=1),
    ]


@pytest.fixture
def empty_library(square_descriptor):
    return FakeLibrary(lambda index: FakeOracle(square_descriptor, placements=()))
