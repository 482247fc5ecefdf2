"""
Binary search trees grown from uniformly random key insertions.

More info:
    Algorithms 4th Edition by Sedgewick and Wayne (Chapter 3)
    An Introduction to the Analysis of Algorithms by Sedgewick and Flajolet (Chapter 6)

"""

import logging
import random

logger = logging.getLogger(__name__)


class InvalidArgument(ValueError):
    """ Raised when a tree is requested for a negative (or non integer) number of keys

    """


class EmptyTree(IndexError):
    """ Raised when a statistic is undefined because the tree has no node

    """


class BSTNode:
    """
    A node of a random binary search tree

    value counts how many times key was drawn, depth is set once at insertion.

    """

    def __init__(self, key, depth):
        self.left = None
        self.right = None
        self.key = key
        self.value = 1
        self.depth = depth

    def insert(self, key):
        """
        Inserts key below this node, without recursion.

        Returns the new node, or None if a node with the same key exists:
        in that case its multiplicity is incremented instead.

        """

        where = self
        while True:
            if key < where.key:
                if where.left is None:
                    where.left = BSTNode(key, where.depth + 1)
                    return where.left
                where = where.left
            elif key > where.key:
                if where.right is None:
                    where.right = BSTNode(key, where.depth + 1)
                    return where.right
                where = where.right
            else:
                where.value += 1
                return None

    def is_leaf(self):
        return self.left is None and self.right is None

    def pre_order(self):
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            if node.right is not None:
                stack.append(node.right)
            if node.left is not None:
                stack.append(node.left)

    def post_order(self):
        # reversed (node, right, left) pre-order
        order = []
        stack = [self]
        while stack:
            node = stack.pop()
            order.append(node)
            if node.left is not None:
                stack.append(node.left)
            if node.right is not None:
                stack.append(node.right)
        return reversed(order)

    def traverse(self):
        stack = []
        node = self
        while stack or node is not None:
            if node is not None:
                stack.append(node)
                node = node.left
            else:
                node = stack.pop()
                yield node
                node = node.right

    def path_lengths(self):
        """
        Returns (size, internal path length, external path length) of the
        subtree rooted at this node.

        A subtree of count nodes adds count - 1 to the internal path length
        of its children and count + 1 to their external path length.

        """

        measures = {}
        for node in self.post_order():
            # absent children measure (0, 0, 0)
            left_size, left_ipl, left_epl = measures.pop(node.left, (0, 0, 0))
            right_size, right_ipl, right_epl = measures.pop(node.right, (0, 0, 0))

            count = left_size + right_size + 1
            measures[node] = (count,
                              left_ipl + right_ipl + count - 1,
                              left_epl + right_epl + count + 1)
        return measures[self]


class RandomBST(object):
    """ A binary search tree built from n random keys drawn in [1, n]

    The tree is built once, in the constructor, and never modified afterwards.
    Keys drawn more than once do not grow the tree, so len(tree) <= n.

    """

    def __init__(self, n, rng=None):
        if isinstance(n, bool) or not isinstance(n, int):
            raise InvalidArgument('the number of keys must be an integer, got %r' % (n,))
        if n < 0:
            raise InvalidArgument("can't generate a tree from %d keys" % n)

        self.n = n
        self.rng = rng if rng is not None else random.Random()
        self.root = None
        self._size = 0
        self._height = 0

        self._generate()

    def _generate(self):
        for _ in range(self.n):
            key = self.rng.randint(1, self.n)
            if self.root is None:
                self.root = BSTNode(key, 0)
                node = self.root
            else:
                node = self.root.insert(key)

            if node is not None:
                self._size += 1
                if node.depth + 1 > self._height:
                    self._height = node.depth + 1

        logger.debug('generated a random BST: n=%d size=%d height=%d',
                     self.n, self._size, self._height)

    def __len__(self):
        return self._size

    def nodes(self):
        """ Generator of the nodes, in symmetric order

        """

        if self.root is not None:
            for node in self.root.traverse():
                yield node

    def keys(self):
        for node in self.nodes():
            yield node.key

    def height(self):
        """ Maximum depth of all the nodes plus 1, 0 for an empty tree

        """

        return self._height

    def leaves(self):
        """ Number of nodes without children

        """

        if self.root is None:
            return 0
        return sum(1 for node in self.root.pre_order() if node.is_leaf())

    def external_node_count(self):
        """ Number of absent children positions

        """

        if self.root is None:
            return 1
        count = 0
        for node in self.root.pre_order():
            count += (node.left is None) + (node.right is None)
        return count

    def internal_path_len(self):
        if self.root is None:
            return 0
        return self.root.path_lengths()[1]

    def external_path_len(self):
        if self.root is None:
            return 0
        return self.root.path_lengths()[2]

    def successful_search_cost(self):
        """
        Average number of compares of a search hitting a stored key:
        internal path length / size + 1

        """

        if self._size == 0:
            raise EmptyTree('no successful search in an empty tree')
        return float(self.internal_path_len()) / self._size + 1

    def unsuccessful_search_cost(self):
        """
        Average number of compares of a search ending on an external node:
        external path length / (size + 1)

        """

        if self._size == 0:
            raise EmptyTree('no unsuccessful search cost for an empty tree')
        return float(self.external_path_len()) / (self._size + 1)

    def paren_systems(self):
        """ The parenthesis system corresponding to the shape of this tree

        """

        out = []
        stack = [self.root]
        while stack:
            item = stack.pop()
            if item is None:
                continue
            if isinstance(item, str):
                out.append(item)
                continue
            out.append('(')
            stack.append(')')
            stack.append(item.right)
            stack.append(item.left)
        return ''.join(out)

    def gambler_ruin_seq(self):
        """ The gambler's ruin sequence corresponding to the shape of this tree

        """

        out = []
        stack = [self.root]
        while stack:
            node = stack.pop()
            if node is None:
                out.append('-')
            else:
                out.append('+')
                stack.append(node.right)
                stack.append(node.left)
        return ''.join(out)

    def dump(self):
        """ Pre-order 'key depth' listing, for debugging

        """

        if self.root is None:
            return ''
        return ''.join('%d %d <-| ' % (node.key, node.depth)
                       for node in self.root.pre_order())

    # Verification helpers

    def is_bst(self):
        """ True if every key strictly separates its left and right subtrees

        """

        if self.root is None:
            return True

        stack = [(self.root, None, None)]
        while stack:
            node, lower, upper = stack.pop()
            if lower is not None and node.key <= lower:
                return False
            if upper is not None and node.key >= upper:
                return False
            if node.left is not None:
                stack.append((node.left, lower, node.key))
            if node.right is not None:
                stack.append((node.right, node.key, upper))
        return True

    def recompute_height(self):
        """ Height obtained by walking the tree, ignoring the stored depths

        """

        height = 0
        stack = [(self.root, 1)] if self.root is not None else []
        while stack:
            node, level = stack.pop()
            height = max(height, level)
            for child in (node.left, node.right):
                if child is not None:
                    stack.append((child, level + 1))
        return height

    def verify(self):
        """
        Checks the tree against the other algorithms of this class.

        Problems are logged and returned, the tree is never modified.

        """

        problems = []
        size = len(self)
        height = self.height()

        if not self.is_bst():
            problems.append('BST not in symmetric order')
        if height != self.recompute_height():
            problems.append('maintained height %d differs from the walked height %d'
                            % (height, self.recompute_height()))
        if size and height < size.bit_length() - 1:
            problems.append('height %d is less than floor(lg(%d))' % (height, size))
        if self.external_node_count() != size + 1:
            problems.append('%d external nodes for %d nodes'
                            % (self.external_node_count(), size))
        if self.external_path_len() != self.internal_path_len() + 2 * size:
            problems.append('external path length %d != internal path length %d + 2*%d'
                            % (self.external_path_len(), self.internal_path_len(), size))

        for problem in problems:
            logger.warning(problem)
        return problems
