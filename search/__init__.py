"""Index spaces, enumeration strategies and exhaustive search drivers."""

from .index_space import IndexSpace, make_index_space, linear_to_multi_index, multi_index_to_linear
from .strategies import (
    IndexStrategy, EnumerationStrategy, ReverseEnumerationStrategy,
    register_strategy, get_strategy, list_strategies, STRATEGY_REGISTRY
)
from .parallel import (
    SearchResult,
    ProgressCounter,
    partition,
    parallel_for_chunks,
    parallel_for_indices,
    parallel_search,
    sequential_search,
)

__all__ = [
    'IndexSpace', 'make_index_space', 'linear_to_multi_index', 'multi_index_to_linear',
    'IndexStrategy', 'EnumerationStrategy', 'ReverseEnumerationStrategy',
    'register_strategy', 'get_strategy', 'list_strategies', 'STRATEGY_REGISTRY',
    'SearchResult', 'ProgressCounter', 'partition', 'parallel_for_chunks', 'parallel_for_indices',
    'parallel_search', 'sequential_search',
]
