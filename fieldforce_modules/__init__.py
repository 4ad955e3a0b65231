"""
FieldForce business modules.

Each module is thin glue around the pure engines: value types, settings,
persistence and a service facade.
"""
