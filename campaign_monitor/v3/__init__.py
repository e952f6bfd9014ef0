"""Bundled Campaign Monitor v3 capability files.

Each ``csrest_<capability>.py`` file is imported by path through
``campaign_monitor.loader.CapabilityLoader``; this directory is the default
base path.
"""
