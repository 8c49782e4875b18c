"""
ConfTx Command-Line Tools
"""
