"""Flask storefront, editor and JSON API for the jewelry catalog."""
