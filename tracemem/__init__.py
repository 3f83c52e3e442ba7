"""
Tracemem

Tracemem is the memory layer of an EVM bytecode interpreter used for
decompiling smart contracts. It emulates the linear, word-addressable
memory of the machine together with its gas cost, and for every byte it
remembers which instruction wrote it last. Starting from a memory read,
an analysis can thus get back to the computation that produced the bytes.

The instructions are opaque to tracemem: the interpreter hands over
a token with every tracked write and gets the token back from `origin`.
"""
