# !/usr/bin/env python


def main():
    from setuptools import find_packages, setup

    version_dict = {}
    init_filename = "distvec/version.py"
    exec(
        compile(open(init_filename).read(), init_filename, "exec"),
        version_dict)

    setup(name="distvec",
          version=version_dict["VERSION_TEXT"],
          description=("Distributed index maps and vectors with mpi4py"),
          long_description=open("README.md").read(),
          long_description_content_type="text/markdown",
          author="CEESD",
          author_email="inform@tiker.net",
          license="MIT",
          classifiers=[
              "Development Status :: 3 - Alpha",
              "Intended Audience :: Developers",
              "Intended Audience :: Science/Research",
              "License :: OSI Approved :: MIT License",
              "Natural Language :: English",
              "Programming Language :: Python",
              "Programming Language :: Python :: 3",
              "Topic :: Scientific/Engineering",
              "Topic :: Scientific/Engineering :: Mathematics",
              "Topic :: Software Development :: Libraries",
              ],

          packages=find_packages(include=["distvec", "distvec.*"]),

          python_requires="~=3.8",

          install_requires=[
              "mpi4py>=3",
              "numpy",
              "pytest>=2.3",
              "pytools>=2018.5.2",
              "logpyle",
              "psutil",
              "pyyaml",
          ],

          package_data={"distvec": ["py.typed"]},

          include_package_data=True,)


if __name__ == "__main__":
    main()
