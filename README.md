# layercache

A small caching toolkit built from interchangeable pieces.

| Module | What it holds |
| --- | --- |
| `layercache.store` | `StoreInterface`, `Options` / `InvalidateOptions`, the option functions, `NotFound` |
| `layercache.codec` | `Codec`, which wraps a store and counts outcomes in `Stats` |
| `layercache.cache` | `Cache`, the basic cache over one store, and key hashing (`cache_key`, `checksum`) |
| `layercache.chain` | `ChainCache`, which reads through several caches and refills the upper ones |
| `layercache.metrics` | `Prometheus`, `Registry`, `GaugeVec`, `Gauge`: codec statistics as labelled gauges |
| `layercache.marshaler` | `Marshaler`, which stores values as msgpack bytes |
| `layercache.bigcache` | `BigcacheStore` over a client following `BigcacheClientInterface` |
| `layercache.freecache` | `FreecacheStore` over a client following `FreecacheClientInterface` |

## Installation

```
pip install layercache
```

## Options

Writes and invalidations take option functions from `layercache.store`:

- `with_expiration(ttl)`: time to live, as a `timedelta` or a number of seconds.
- `with_tags([...])`: tags attached to the item.
- `with_cost(n)`: a cost for stores that use one.
- `with_client_side_caching(ttl)`: a client-side expiration for stores that use one.
- `with_invalidate_tags([...])`: for `invalidate`, drops every key recorded under those tags.

`apply_options(...)` and `apply_options_with_default(defaults, ...)` turn them into an
`Options` value. A store that holds nothing under a key raises `NotFound`
(a `LookupError`).

## Stores

The two stores keep bytes in a client object that you supply, and record tagged keys
under a tag entry (`gocache_tag_<tag>` / `freecache_tag_<tag>`, kept for 720 hours).

- `FreecacheStore` accepts only `bytes` values and string keys; other types raise
  `TypeError`. It passes the expiration in whole seconds to the client, supports
  `get_with_ttl`, and raises `LookupError` when the client deletes nothing.
  `invalidate` removes the tagged keys and then the tag entry itself.
- `BigcacheStore` accepts `str` or `bytes` values. It has no expiration of its own,
  `get_with_ttl` raises `NotImplementedError`, and `invalidate` ignores failed deletes.

## Example

A dictionary-backed client for `FreecacheStore` (it ignores expiry):

```python
from layercache.freecache import FreecacheClientInterface

class DictClient(FreecacheClientInterface):
    def __init__(self):
        self.data = {}

    def get(self, key):
        return self.data[key]          # KeyError when missing

    def ttl(self, key):
        self.data[key]
        return 0

    def set(self, key, value, expire_seconds):
        self.data[key] = value

    def delete(self, key):
        return self.data.pop(key, None) is not None

    def clear(self):
        self.data.clear()
```

```python
from layercache.cache import Cache
from layercache.freecache import FreecacheStore
from layercache.store import NotFound, with_expiration, with_tags, with_invalidate_tags

cache = Cache(FreecacheStore(DictClient()))

cache.set("user:1", b"alice", with_expiration(60), with_tags(["users"]))
print(cache.get("user:1"))            # b'alice'

cache.invalidate(with_invalidate_tags(["users"]))
try:
    cache.get("user:1")
except NotFound:
    print("gone")

print(cache.codec.stats())            # Stats(hits=1, miss=1, set_success=1, ...)
```

Keys that are not strings are hashed with MD5 over their type and `repr`; an object
with a `get_cache_key()` method (`CacheKeyGenerator`) supplies its own key.

## Chaining caches

```python
from layercache.chain import ChainCache

with ChainCache(fast_cache, slow_cache) as chain:
    value = chain.get("user:1")   # a hit in slow_cache is written back to fast_cache
    chain.flush()                 # wait for the background write-back
```

`get` raises the last layer's error when no layer holds the key. `set` writes to
every layer and raises one `RuntimeError` listing each failure; `delete`,
`invalidate` and `clear` ignore failures in individual layers. A layer is read with
`get_with_ttl`, so a `Cache` over `BigcacheStore` always counts as a miss there.

## Metrics

```python
from layercache.metrics import Prometheus, Registry

registry = Registry()
metrics = Prometheus("my-service", registerer=registry)

metrics.record_from_codec(cache.codec)
metrics.flush()
gauge = metrics.collector.with_label_values("my-service", "freecache", "hit_count")
print(gauge.value)
metrics.close()
```

Recorded metrics are `hit_count`, `miss_count`, `set_success`, `set_error`,
`delete_success`, `delete_error`, `invalidate_success` and `invalidate_error`.
Without `registerer`, the collector goes into the shared `DEFAULT_REGISTRY`, which
refuses a second collector with the same name (`ValueError`).

## Marshaling

```python
from dataclasses import dataclass
from layercache.marshaler import Marshaler

@dataclass
class Profile:
    Hello: str

marshaler = Marshaler(cache)
marshaler.set("profile", Profile("world"))
print(marshaler.get("profile", Profile))   # Profile(Hello='world')
```

Dataclasses are packed as maps; `get` rebuilds `return_type` from a map, or returns
the unpacked data when no type is given.

## What this package does not do

- It ships no storage engine: `BigcacheStore` and `FreecacheStore` need a client
  object, and nothing here talks to a network cache server.
- There is no cache that calls a load function on a miss, and no cache wrapper that
  publishes metrics on its own; call `Prometheus.record_from_codec` yourself.
- The gauges live in memory only; nothing exposes them over HTTP.