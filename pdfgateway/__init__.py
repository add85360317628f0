"""pdfgateway - HTML to PDF conversion over a managed headless Chromium."""

__version__ = "1.0.0"
