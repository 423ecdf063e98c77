# Copyright 2019 Joan Puig
# See LICENSE for details


import sys

from FITInspector.decoder import FITFileContentError, decode
from FITInspector.report import describe, format_report


def main():
    # This sample code shows how to print the summary of a FIT file, or the reason it could not be decoded

    # Modify to fit your directory setup
    file_name = './data/FIT/MY_ACTIVITY_FILE.fit'

    # Reads the binary data of the .FIT file
    with open(file_name, 'rb') as fit_file:
        file_bytes = fit_file.read()

    try:
        file = decode(file_bytes, check_crc=True)
    except FITFileContentError as error:
        print(f'{error.reason.name}: {error}', file=sys.stderr)
        return

    print(format_report(describe(file, file_name, len(file_bytes))))


if __name__ == "__main__":
    main()
