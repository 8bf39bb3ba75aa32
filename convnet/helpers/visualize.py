# convnet/helpers/visualize.py
import math
import pathlib

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.cm as colormap
import numpy as np

from .Backend import backend
from ..errors import LayerNotInitializedError


def _grid(n):
    cols = int(math.ceil(math.sqrt(n)))
    rows = int(math.ceil(n / cols))
    return rows, cols


def _normalize(img):
    lo, hi = np.min(img), np.max(img)
    if hi - lo < 1e-12:
        return np.zeros_like(img)
    return (img - lo) / (hi - lo)


def plot_filters(layer, path, title=None):
    """
    Saves every filter of an initialized ConvLayer as one grid image.
    Filters with depth 3 are drawn as RGB, otherwise depth slice 0 in grey.
    """
    if layer.filters is None:
        raise LayerNotInitializedError(layer, "plot_filters")
    path = pathlib.Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    rows, cols = _grid(len(layer.filters))
    fig, axes = plt.subplots(rows, cols, figsize=(cols * 1.5, rows * 1.5), squeeze=False)
    for i, ax in enumerate(axes.flat):
        ax.axis("off")
        if i >= len(layer.filters):
            continue
        arr = np.asarray(backend.to_cpu(layer.filters[i].to_array()))
        if arr.shape[2] == 3:
            ax.imshow(_normalize(arr), interpolation="nearest")
        else:
            ax.imshow(_normalize(arr[:, :, 0]), cmap=colormap.gray, interpolation="nearest")
        ax.set_title(str(i), fontsize=8)
    fig.suptitle(title or f"{len(layer.filters)} filters")
    fig.tight_layout()
    fig.savefig(path, dpi=120)
    plt.close(fig)
    return str(path)


def plot_activation(volume, path, title=None):
    """Saves each depth slice of a volume as a heatmap grid."""
    path = pathlib.Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    arr = np.asarray(backend.to_cpu(volume.to_array()))
    rows, cols = _grid(volume.depth)
    fig, axes = plt.subplots(rows, cols, figsize=(cols * 2, rows * 2), squeeze=False)
    for d, ax in enumerate(axes.flat):
        ax.axis("off")
        if d >= volume.depth:
            continue
        ax.imshow(arr[:, :, d], cmap=colormap.viridis, interpolation="nearest")
        ax.set_title(f"d={d}", fontsize=8)
    fig.suptitle(title or f"{volume.width}x{volume.height}x{volume.depth}")
    fig.tight_layout()
    fig.savefig(path, dpi=120)
    plt.close(fig)
    return str(path)
