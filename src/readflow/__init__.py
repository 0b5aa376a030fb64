"""ReadFlow: document text extraction and AI analysis pipeline."""

__version__ = "0.1.0"
