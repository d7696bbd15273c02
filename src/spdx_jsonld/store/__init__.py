"""Model store interface and an in-memory implementation."""
from spdx_jsonld.store.model_store import ModelStore
from spdx_jsonld.store.in_memory import InMemoryModelStore
