"""
Fonctionnalités périphériques du bridge (front stdio, configuration client).
"""
