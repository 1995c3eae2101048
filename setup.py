from setuptools import setup

version = '0.1'

with open("README.md", "r", encoding="utf-8") as f:
    long_descr = f.read()

setup(
    name='pyswav',
    packages=['pyswav'],
    version=version,
    license='MIT',
    description='Control SW-AV series audio/video switchers over RS-232',
    long_description=long_descr,
    long_description_content_type='text/markdown',
    python_requires='>=3.10',
    keywords=['Extron', 'SW6AV', 'SW12AV', 'A/V Switcher', 'RS-232'],
    install_requires=[
        "pyserial>=3.5"
    ],
    extras_require={
        'test': ["pytest>=7.0"],
    },
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'Topic :: Multimedia :: Video',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3.10'
    ],
)
