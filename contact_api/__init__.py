"""Contact Form API: stores contact-form submissions and their attached images."""

__version__ = "0.1.0"
