# Copyright 2019 Joan Puig
# See LICENSE for details


from FITInspector.decoder import Decoder
from FITInspector.frames import message_frame


def main():
    # This sample code shows how to extract all the record messages of a FIT file into a pandas DataFrame

    # Modify to fit your directory setup
    file_name = './data/FIT/MY_ACTIVITY_FILE.fit'

    file = Decoder.decode_fit_file(file_name)
    records = message_frame(file, 'record')

    print(records.describe())


if __name__ == "__main__":
    main()
