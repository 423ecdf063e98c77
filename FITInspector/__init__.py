# Copyright 2019 Joan Puig
# See LICENSE for details


from typing import Iterable, Set


__version__ = '0.1.0'


def duplicates(elements: Iterable) -> Set:
    s = set()
    return set(element for element in elements if element in s or s.add(element))
