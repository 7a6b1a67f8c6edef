from query_cache.cache import CacheStore, generate_key


def test_key_is_independent_of_param_order():
    assert generate_key("tx", {"b": 2, "a": 1}) == generate_key("tx", {"a": 1, "b": 2})


def test_key_layout():
    key = generate_key("transactions", {"month": "2024-05", "account": 7})

    assert key == "transactions:account:7|month:2024-05"


def test_key_without_params():
    assert generate_key("categories") == "categories:"
    assert generate_key("categories", {}) == "categories:"


def test_scalars_render_like_the_web_client():
    key = generate_key("q", {"archived": False, "limit": 10, "parent": None, "paid": True})

    assert key == "q:archived:false|limit:10|paid:true|parent:null"


def test_store_exposes_key_derivation():
    store = CacheStore()

    assert store.generate_key("acct", {"id": 3}) == generate_key("acct", {"id": 3})


def test_distinct_params_give_distinct_keys():
    assert generate_key("tx", {"a": 1}) != generate_key("tx", {"a": 2})
    assert generate_key("tx", {"a": 1}) != generate_key("acct", {"a": 1})
