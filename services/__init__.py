# services/__init__.py
# Business operations. Each returns errors.Result; only the access gate raises.
