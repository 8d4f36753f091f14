"""Tensors, CPU tensor operations, learning-rate decay, SGD and a matrix-multiplication benchmark."""

__version__ = "0.0.1"