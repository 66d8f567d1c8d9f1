import heapq
from typing import Callable, Dict, Optional


class HuffmanError(Exception):
    """Base class for codec errors."""


class InvalidInputError(HuffmanError, ValueError):
    pass


class UnknownSymbolError(HuffmanError, KeyError):
    pass


class MalformedHeaderError(HuffmanError, ValueError):
    def __init__(self, message, token="", offset=0):
        super().__init__(f"{message} at byte {offset}: {token!r}")
        self.token = token
        self.offset = offset


class TruncatedStreamError(HuffmanError):
    pass


class HuffmanLeaf: # Leaf of the Huffman tree, holds one symbol
    def __init__(self, symbol, weight):
        self.symbol = symbol
        self.weight = weight # occurrence count of the symbol

    def is_leaf(self):
        return True

    def __repr__(self):
        return f"HuffmanLeaf({self.symbol!r}, {self.weight})"


class HuffmanInternal: # Internal node, owns exactly two subtrees
    def __init__(self, weight, left, right):
        self.weight = weight # combined weight of both subtrees
        self.left = left
        self.right = right

    def is_leaf(self):
        return False

    def __repr__(self):
        return f"HuffmanInternal({self.weight}, {self.left!r}, {self.right!r})"


def build_frequency_table(text: str) -> Dict[str, int]: # text: any str, may be empty
    ft: Dict[str, int] = {}
    for ch in text:
        ft[ch] = ft.get(ch, 0) + 1
    return ft


def build_huffman_tree(frequency_table): # frequency_table: dict of symbol -> frequency
    if not frequency_table:
        raise InvalidInputError("cannot build a Huffman tree from an empty frequency table")

    # Heap entries are (weight, sequence, node). Leaves go in by ascending symbol
    # and merged nodes get later sequence numbers, so equal weights always
    # resolve the same way whatever order the table iterates in.
    priority_queue = []
    for sequence, symbol in enumerate(sorted(frequency_table)):
        weight = frequency_table[symbol]
        if weight <= 0:
            raise InvalidInputError(f"frequency of {symbol!r} must be positive, got {weight}")
        priority_queue.append((weight, sequence, HuffmanLeaf(symbol, weight)))
    heapq.heapify(priority_queue)

    sequence = len(priority_queue)
    while len(priority_queue) > 1:
        left_weight, _, left = heapq.heappop(priority_queue)
        right_weight, _, right = heapq.heappop(priority_queue)
        merged = HuffmanInternal(left_weight + right_weight, left, right)
        heapq.heappush(priority_queue, (merged.weight, sequence, merged))
        sequence += 1

    return priority_queue[0][2] # root of the tree, a bare leaf for a one-symbol alphabet


def generate_huffman_codes(root): # root: root of the Huffman tree
    codes = {}
    def generate_codes_helper(node, current_code):
        # Leaf node -> assign code ('' when the root itself is a leaf)
        if node.is_leaf():
            codes[node.symbol] = current_code
            return

        generate_codes_helper(node.left, current_code + '0')
        generate_codes_helper(node.right, current_code + '1')

    generate_codes_helper(root, '')
    return codes


def huffman_encode(text: str, code_map: dict) -> str: # code_map: dict of symbol -> Huffman code
    parts = []
    for ch in text:
        code = code_map.get(ch)
        if code is None:
            raise UnknownSymbolError(f"symbol {ch!r} has no code in the code table")
        parts.append(code)
    return ''.join(parts)


def huffman_decode(
    bitstring: str,
    root,
    expected_length: Optional[int] = None,
    strict: bool = False,
    trace: Optional[Callable[[str], None]] = None,
) -> str:
    """
    Decode a string of '0'/'1' bits by walking the Huffman tree.

    Decoding stops after expected_length symbols (default: root.weight, the
    symbol count the tree was built from), so byte padding at the end of the
    stream is ignored. If the bits run out first, the partial symbol is
    dropped and the text decoded so far is returned, unless strict is set,
    in which case TruncatedStreamError is raised.
    """
    if expected_length is None:
        expected_length = root.weight

    # One-symbol alphabet: the code is empty, so the count alone says how many
    if root.is_leaf():
        return root.symbol * expected_length

    decoded = []
    current_node = root
    consumed = 0
    for bit in bitstring:
        if len(decoded) >= expected_length:
            break
        if bit == '0':
            current_node = current_node.left
        elif bit == '1':
            current_node = current_node.right
        else:
            raise ValueError(f"invalid bit {bit!r} at position {consumed}")
        consumed += 1

        if current_node.is_leaf(): # reached a leaf
            decoded.append(current_node.symbol)
            current_node = root # reset to the root for the next symbol

    if len(decoded) < expected_length:
        message = (
            f"bit stream ended after {len(decoded)} of {expected_length} symbols"
            + (" in the middle of a code" if current_node is not root else "")
        )
        if strict:
            raise TruncatedStreamError(message)
        if trace is not None:
            trace(message + "; partial output kept")
    elif trace is not None and consumed < len(bitstring):
        trace(f"discarded {len(bitstring) - consumed} trailing padding bits")

    return ''.join(decoded)
