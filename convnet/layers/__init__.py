from .Layer import Layer
from .ConvLayer import ConvLayer

__all__ = [
    "Layer",
    "ConvLayer",
]
