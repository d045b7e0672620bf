"""Folio — page snapshots for static-site builds from aggregated content.

Reduces a flat collection of content records into a snapshot of pages
(URL path + record + props) and shared props, hands it to consumer processes
through a cache file, and wakes them over a WebSocket push channel when it
changes.

Producer side (inside the content pipeline)::

    import folio

    producer = folio.initialize(folio.load_config("my-site/"))
    producer.on_data_ready(records)      # once per "data ready" event

Consumer side (inside each build step or render)::

    client = folio.DataClient.from_root("my-site/")
    paths = await client.get_static_paths()
    props = await client.get_static_props_for_page_at_path("/posts/hello-world")

Rules are data or plain callables::

    from folio import PageTypeDefinition, PropDefinition, model_predicate

    pages = [PageTypeDefinition(model_predicate("post"), path="/posts/{slug}")]
    common_props = {"site": PropDefinition(model_predicate("config"), single=True)}

"""

__version__ = "0.1.0"
__all__ = [
    "DataClient",
    "FolioConfig",
    "PageTypeDefinition",
    "Producer",
    "PropDefinition",
    "Snapshot",
    "__version__",
    "initialize",
    "load_config",
    "model_predicate",
    "on_data_ready",
]

_LAZY: dict[str, str] = {
    "DataClient": "folio.client",
    "FolioConfig": "folio.config",
    "PageTypeDefinition": "folio.transform",
    "Producer": "folio.producer",
    "PropDefinition": "folio.transform",
    "Snapshot": "folio.transform",
    "initialize": "folio.producer",
    "load_config": "folio.config_loader",
    "model_predicate": "folio.rules",
    "on_data_ready": "folio.producer",
}


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import folio`` fast; the push-channel stack (Starlette, uvicorn)
    is only imported when the producer is used.
    """
    module_name = _LAZY.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    return getattr(importlib.import_module(module_name), name)
