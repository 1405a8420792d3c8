"""Server-rendered knock page.

Served by the FastAPI app with Jinja2 templates; the form model in
``knockweb_core.forms`` produces the rows, the templates only lay them out.
"""
