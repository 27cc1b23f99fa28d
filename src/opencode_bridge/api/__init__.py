"""
API HTTP du bridge.
"""
