"""Fixture lifecycle: dump loading, cleanup, inserted-row tracking and assertions."""

from sqlfixture.fixture.assertions import QueryAssertions
from sqlfixture.fixture.cleanup import CleanupEngine
from sqlfixture.fixture.loader import DatasetLoader
from sqlfixture.fixture.module import DatabaseModule
from sqlfixture.fixture.policies import best_effort, fatal
from sqlfixture.fixture.populator import DbPopulator
from sqlfixture.fixture.state import PopulationState
from sqlfixture.fixture.tracker import InsertedRow, MutationTracker

__all__ = [
    "DatabaseModule",
    # Building blocks
    "DatasetLoader",
    "CleanupEngine",
    "DbPopulator",
    "PopulationState",
    "MutationTracker",
    "InsertedRow",
    "QueryAssertions",
    # Error policies
    "fatal",
    "best_effort",
]
