class Resource:
    """Base class for data objects that other objects refer to, like the sprite atlas."""

    _resource_counts = {}  # Just to track the number of resources alive
    _rev = 0  # integer hash

    def __init__(self):
        cname = self.__class__.__name__
        Resource._resource_counts[cname] = Resource._resource_counts.get(cname, 0) + 1
        self._bump_rev()

    def __del__(self):
        cname = self.__class__.__name__
        Resource._resource_counts[cname] -= 1

    def _bump_rev(self):
        Resource._rev += 1
        self._rev = Resource._rev

    @property
    def rev(self):
        """The revision number (integer).

        The number changes when the data of the resource changes. It is
        monotonically increasing and globally unique, so it can be used as
        a hash for the data content.
        """
        return self._rev
