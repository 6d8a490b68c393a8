"""HortaShop client library.

Role-scoped access to the HortaShop marketplace backend: buyer, producer
and delivery courier order repositories, the review gate, and the push
notification token lifecycle.
"""

__version__ = "1.0.0"
