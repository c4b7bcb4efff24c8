# Utils Package
from .helpers import load_config, save_results, setup_logging, create_allocator_from_config

__all__ = ['load_config', 'save_results', 'setup_logging', 'create_allocator_from_config']
