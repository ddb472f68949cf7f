from src.extractor.sink.writers import DelimitedFileWriter, LineFileWriter
