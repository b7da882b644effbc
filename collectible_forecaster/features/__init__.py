"""
Series statistics consumed by the engines.

Modules
-------
returns     Time-normalised log returns, GARCH(1,1) volatility, MarketStats.
indicators  EMA, momentum, moving averages, support / resistance, volume.
sentiment   Demand / trend rating lookup tables.
"""
