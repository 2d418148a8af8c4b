# src/rx_matching/processors/__init__.py
