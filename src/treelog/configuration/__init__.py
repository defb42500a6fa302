"""
treelog configuration - validation and application of configuration tables.

Modules:
    models: Pydantic models for root and logger tables
    api: configure / get_config / reset_config
    live_level: Root level following an environment variable
    command_line: Root level from -v / --quiet style flags
"""
