"""Binary .mesh decoding: layout constants, error model, stream drivers."""
