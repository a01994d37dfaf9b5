"""LTSV to Avro conversion core: tokenizing, classification, streaming and encoding."""
