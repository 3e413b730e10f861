"""
filechat - chat with local documents through a hosted assistant.

Local files are discovered and ingested into a remote vector store; a remote
assistant bound to that store answers questions on a conversation thread.
Identifiers of the remote resources are cached on disk so they are created
only once.

Submodules:
    - filechat.discovery: recursive document discovery with type/size filters
    - filechat.store: JSON-backed key/value cache of remote identifiers
    - filechat.remote: thin wrapper over the OpenAI assistants API
    - filechat.session: idempotent provisioning of index, assistant and thread
    - filechat.settings: environment-driven settings

Environment Variables:
    DEFAULT_PATHS: comma-separated roots searched for documents
    OPENAI_CONFIG_CACHE: cache file path (default: config.json)
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
