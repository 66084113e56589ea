#!/usr/bin/python
from setuptools import setup

from costream import __version__ as version

setup(
    name='costream',
    version=version,
    description='''
        Streams fed by coroutines: producers push items with a sender,
        consumers pull them with a poll, await or async for.
    ''',
    long_description=open('README.txt').read(),
    packages=['costream', 'costream.core'],
    zip_safe=True,
    python_requires='>=3.8',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Framework :: AsyncIO',
        'Topic :: Software Development :: Libraries',
    ],
    install_requires=[],
    test_suite='tests'
)
