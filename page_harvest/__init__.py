"""
PageHarvest package initializer.
The console entry point lives in :mod:`page_harvest.cli`.
"""
__version__ = "0.1.0"
