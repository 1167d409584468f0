"""Constants used throughout the zipclass package."""

SPLIT_TRAIN = "train"
SPLIT_TEST = "test"
SPLIT_VALIDATION = "validation"

# Directories recognised as split segments during indexing
SPLIT_DIRECTORIES = (SPLIT_TRAIN, SPLIT_VALIDATION, SPLIT_TEST)

# Splits that get their own cursor; validation files only feed the label map
ITERABLE_SPLITS = (SPLIT_TRAIN, SPLIT_TEST)

# Matched case-sensitively, no other extensions are indexed
IMAGE_FILE_EXTENSIONS = (".jpg", ".jpeg", ".png")

# Channel count reported by fast metadata (assumes RGB)
DEFAULT_CHANNELS = 3

# Subdirectory of data_dir the archive is unpacked into
IMAGES_SUBDIR = "images"

METADATA_VALIDATION_MODES = ("fast", "strict")
