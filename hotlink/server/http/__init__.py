from .content_server import ContentServer as ContentServer
