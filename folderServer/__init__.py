from .classify import MEDIA_TYPES, RequestClass, classify, content_disposition
from .config import ServerConfig
from .handler import STYLE, FolderRequestHandler
from .server import folderServer
from .tls import Credential, build_ssl_context, generate_self_signed_credential

__all__ = [
    "folderServer",
    "FolderRequestHandler",
    "ServerConfig",
    "Credential",
    "RequestClass",
    "MEDIA_TYPES",
    "STYLE",
    "classify",
    "content_disposition",
    "build_ssl_context",
    "generate_self_signed_credential",
]
