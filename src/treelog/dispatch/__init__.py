"""
treelog dispatch - log records and the propagation driver.

Modules:
    record: Log record creation and argument parsing
    engine: Propagation walk and async routing
"""
