"""SPDX-License-Identifier: GPL-3.0-only

Interactive layer over the Recoll result pipeline.

Re-exports the post-open dispatcher and the result browser.
"""

from .dispatch import DispatchReport, OpenedDocument, open_document, run_post_open  # noqa: F401
from .extract import TextCache  # noqa: F401
from .shell import ResultShell  # noqa: F401
