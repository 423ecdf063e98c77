from setuptools import setup, find_packages


with open("README.md", "r") as fh:
    long_description = fh.read()


setup(
    name='FITInspector',
    version='0.1.0',
    url='https://github.com/JoanPuig/FITInspector',
    license='Apache License 2.0',
    author='Joan Puig',
    author_email='joan.puig@gmail.com',
    description='FITInspector decodes in-memory .FIT files into header, sections and footer',
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=['FITInspector', 'FITInspector.*']),
    python_requires='>=3.7',
    install_requires=['numpy', 'pandas'],
    extras_require={
        'test': ['pytest'],
    },
)
