"""Constants and error codes for the geo photo KML application."""


class Constants:
    """
    Constants used throughout the geo_photo_kml application.

    Attributes:
        APP_NAME (str): Name written into the root folder description.
        KML_NAMESPACE (str): Default namespace of the generated document.
        COORDINATE_PRECISION (int): Coordinates are truncated to 1/COORDINATE_PRECISION degrees.
        DEFAULT_DIMENSION (tuple): Pixel size assumed when an image cannot be decoded.
        EXCLUDE_SEPARATOR (str): Separator for the exclude pattern list.
        THUMBNAILS_SUFFIX (str): Suffix appended to the KML basename for the thumbnail directory.
        DEFAULT_CONFIG_NAME (str): File name of the TOML configuration in the working directory.

    Classes:
        ErrorCodes: Application exit codes indicating various error and success states.
        Colors: KML aabbggrr colors used by generated styles.
    """

    APP_NAME = "geo-photo-kml"
    KML_NAMESPACE = "http://www.opengis.net/kml/2.2"
    DEFAULT_CONFIG_NAME = "geo_photo_kml.toml"

    COORDINATE_PRECISION = 1_000_000
    DEFAULT_LATITUDE = 57.6
    DEFAULT_LONGITUDE = 11.3
    DEFAULT_DIMENSION = (200, 200)

    EXCLUDE_SEPARATOR = "::"
    THUMBNAILS_SUFFIX = "-thumbnails"
    THUMBNAIL_QUALITY = 85
    EXTERNAL_DESCRIPTION_FILE = "mapollage_descriptions.txt"

    # Style ids, formatted with the CRC32 of the photo file
    STYLE_NORMAL_ID = "s_{crc:08x}"
    STYLE_HIGHLIGHT_ID = "s_{crc:08x}_hl"
    STYLE_MAP_ID = "m_{crc:08x}"
    BALLOON_STYLE_ID = "BalloonStyleId"

    NORMAL_ICON_SCALE = 1.0
    HIGHLIGHT_ICON_SCALE = 1.1

    # Folder names
    PATH_FOLDER_NAME = "Path"
    PATH_GAP_FOLDER_NAME = "Path Gap"
    POLYGON_FOLDER_NAME = "Polygon"
    NO_SPLIT_KEY = "NO_SPLIT"

    # Date formats
    PATH_NAME_DATE_FORMAT = "%Y-%m-%d %H:%M"
    DESCRIPTION_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
    EXIF_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"
    INVALID_DATE_NAME = "invalid exif date"

    # Orientations that turn a landscape sensor frame into a portrait image
    PORTRAIT_ORIENTATIONS = {6, 8}

    class Colors:
        """KML colors in aabbggrr notation."""

        PATH = "ff0000ff"
        PATH_GAP = "ff00ffff"
        POLYGON_LINE = "00000000"
        POLYGON_FILL = "ccffffff"
        BALLOON_BACKGROUND = "ff272420"
        BALLOON_TEXT = "ffeeeeee"

    class ErrorCodes:
        """
        ErrorCodes

        Integer exit codes returned by the geo-photo-kml command.

        Attributes:
            SUCCESS (int): KML file written.
            INTERRUPTED (int): Run interrupted by the user.
            FILE_OPERATION_ERROR (int): The destination or sample config could not be written.
            CONFIGURATION_ERROR (int): Invalid or missing configuration.
            GENERAL_ERROR (int): General or unspecified error.
            ABORTED (int): Run aborted before serialization.
            NO_FILES (int): No matching files were found.
        """

        SUCCESS = 0
        INTERRUPTED = 1
        FILE_OPERATION_ERROR = 17
        CONFIGURATION_ERROR = 19
        GENERAL_ERROR = 20
        ABORTED = 21
        NO_FILES = 22
