from setuptools import setup

setup(
    name='atmfjstc-cats-archive',
    version='1.0.0',

    author_email='atmfjstc@protonmail.com',

    package_dir={'': 'src'},
    packages=['atmfjstc.lib.cats_archive'],

    install_requires=[
        'atmfjstc-binary-utils>=1, <2',
        'atmfjstc-file-utils>=1.2, <2',
    ],

    extras_require={
        'test': [
            'pytest>=7',
        ],
    },

    zip_safe=True,

    description="Reader for CATS single-file archives",

    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Topic :: System :: Archiving",
        "Typing :: Typed",
    ],
    python_requires='>=3.7',
)
