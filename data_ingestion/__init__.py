"""
Market data ingestion: public order book REST client.
"""
