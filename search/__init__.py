"""SPDX-License-Identifier: GPL-3.0-only

Recoll result pipeline.

Exposes the pieces between a typed query and a linked outline:
	* Query sanitizing and reduction
	* Recoll invocation (header, windowed results, index refresh)
	* Report parsing and outline formatting
	* Page window and search session state
"""

from .config import Settings, load_settings  # noqa: F401
from .engine import EngineOutput, RecollEngine  # noqa: F401
from .formatter import FormattedDocument, Link, ResultRecord, format_results, parse_report  # noqa: F401
from .pagination import InvalidNavigation, PageWindow  # noqa: F401
from .query import reduce_query, sanitize_query  # noqa: F401
from .session import QueryHistory, ResultPage, SearchSession  # noqa: F401
