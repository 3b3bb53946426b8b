"""
Smoke tests to verify all modules can be imported.
"""

def test_import_store():
    import store
    assert hasattr(store, '__version__')


def test_import_kvdb():
    import kvdb
    assert hasattr(kvdb, '__version__')
