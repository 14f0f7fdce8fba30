from meilisearch_rest.index.index import Index

__all__ = ["Index"]
