"""
Core session machinery: TraceDir sessions, configuration, exceptions and
diagnostic logging.
"""
