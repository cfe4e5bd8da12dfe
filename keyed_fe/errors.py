# keyed_fe/errors.py
"""
Error taxonomy for model definition defects.

All of these are raised as early as possible (element construction, then
stiffness computation, then solve) and are never retried: they mean the model
itself has to be fixed by whoever built it.

Stiffness paths that are deliberately unfinished raise the builtin
NotImplementedError.
"""


class InvalidGeometryError(ValueError):
    """Raised for degenerate element geometry (zero length, collinear nodes)."""
    pass


class MalformedElementError(ValueError):
    """Raised when an element is given the wrong number of nodes."""
    pass


class UnsupportedFreedomError(KeyError):
    """
    Raised when a (node, dof) key is requested that does not exist.

    Either the element variant does not support that degree of freedom, or the
    key is simply not on the relevant axis of a keyed matrix/vector.
    """

    def __str__(self):
        # KeyError repr()s its argument; keep the message readable
        return str(self.args[0]) if self.args else ""


class UnderConstrainedError(RuntimeError):
    """Raised when K_FF is singular or ill-conditioned (unrestrained rigid-body mode)."""
    pass
