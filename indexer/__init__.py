"""Document model shared by sources, pipelines and the server."""
