"""
Hold-out backtesting used to weight the Flow engine's ensemble.

Modules
-------
holt_winters  Double exponential smoothing and its (alpha, beta) grid fit.
metrics       MSE and inverse-variance ensemble weights.
evaluator     EMA forecast, per-method hold-out backtests, ensemble weights.
"""
