"""Your Commonbase search client."""

__version__ = "0.1.0"
__full_name__ = "Your Commonbase Search"
