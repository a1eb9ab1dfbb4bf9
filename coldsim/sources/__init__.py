"""Atom sources: ovens, gaussian sources, mass distributions, emission rates and precalculated distributions."""