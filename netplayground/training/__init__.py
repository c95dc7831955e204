"""Model building, the chunked training driver and the session facade.

Submodules are imported explicitly (``netplayground.training.session`` and so
on) so that :mod:`netplayground.inference` can depend on the model module
without pulling in the session.
"""
