"""Index page rendering for the landscape website.

The web asset bundle ships an ``index.html`` template with three
placeholders: ``{landscape_title}``, ``{landscape_url}`` and
``{base_dataset_json}``. Rendering injects the landscape identity and the
base dataset, serialized as compact JSON, so the page can draw the landscape
without an extra request.

Example
-------
>>> html = render_index(datasets, "<title>{landscape_title}</title>")
"""

from __future__ import annotations

import html
import json
import re

from .data_aggregator import Datasets

PLACEHOLDER = re.compile(r"\{(landscape_title|landscape_url|base_dataset_json)\}")


def render_index(datasets: Datasets, template: str) -> str:
    r"""Render the index document from the template provided.

    Parameters
    ----------
    datasets : Datasets
        Generated datasets; ``base`` is embedded in the page.
    template : str
        Content of the ``index.html`` template.

    Returns
    -------
    str
        Fully rendered HTML content.

    Raises
    ------
    TypeError, ValueError
        If the base dataset cannot be serialized.

    Notes
    -----
    The embedded JSON has ``</`` escaped as ``<\/`` so it cannot close the
    surrounding ``<script>`` element.

    Examples
    --------
    >>> from landscape.pipeline.website_generator.data_aggregator import Datasets
    >>> ds = Datasets(base={"foundation": "CNCF", "url": "https://l.cncf.io"}, full={})
    >>> render_index(ds, "<h1>{landscape_title}</h1>")
    '<h1>CNCF landscape</h1>'
    """
    base = datasets.base
    payload = json.dumps(base, ensure_ascii=False).replace("</", "<\\/")
    title = html.escape(f"{base.get('foundation', '')} landscape")
    values = {
        "landscape_title": title,
        "landscape_url": html.escape(base.get("url") or ""),
        "base_dataset_json": payload,
    }
    return PLACEHOLDER.sub(lambda match: values[match.group(1)], template)
