"""
Fleet core unit tests
"""

import unittest
from .test_api import APITests, BrokenStoreAPITests, CustomCollectionAPITests, DefaultPageLimitAPITests
from .test_cli import CLITests
from .test_conditional import ConditionalTests
from .test_pagination import PageWindowTests, PaginateTests, QueryParameterTests
from .test_persistence import FilterTests, RepositoryTests


TEST_CLASSES = [
    APITests,
    BrokenStoreAPITests,
    CLITests,
    ConditionalTests,
    CustomCollectionAPITests,
    DefaultPageLimitAPITests,
    FilterTests,
    PageWindowTests,
    PaginateTests,
    QueryParameterTests,
    RepositoryTests,
]


def get_suite() -> unittest.TestSuite:
    suite = unittest.TestSuite()
    for cls in TEST_CLASSES:
        for fixture in filter(lambda f: f.startswith("test_"), dir(cls)):
            suite.addTest(cls(fixture))
    return suite
