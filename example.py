"""Example usage of the hotclass library."""

from pathlib import Path

from hotclass import ClassRuntimeError, ClassSystem, ClassSystemConfig

# Class bodies live in plain files: one file per class, path derived from the dotted name.
class_root = Path("./example_classes")
(class_root / "zoo").mkdir(parents=True, exist_ok=True)

(class_root / "zoo" / "Animal.py").write_text('''
static.LEGS = 4

@meta.define
def __init__(self, name):
    self.name = name

@meta.define
def speak(self):
    return f"{self.name} makes a sound"

Property("title", get=lambda self: self.name.title())
''')

(class_root / "zoo" / "Dog.py").write_text('''
Inherit("zoo.Animal")

@meta.define
def speak(self):
    return f"{self.title} barks"
''')

system = ClassSystem(ClassSystemConfig(class_root=class_root.as_posix()))
system.require_class("zoo.Dog")

zoo = system.namespace.zoo
rex = zoo.Dog("rex")
print(f"{system.class_name(rex)}: {rex.speak()} on {zoo.Dog.LEGS} legs")
print(f"  is an Animal: {system.is_instance(rex, 'zoo.Animal')}")

# Edit the superclass and reload it; Dog is reloaded along with it.
(class_root / "zoo" / "Animal.py").write_text('''
static.LEGS = 3

@meta.define
def __init__(self, name):
    self.name = name

Property("title", get=lambda self: "Sir " + self.name.title())
''')
print(f"\nReloaded: {', '.join(system.reload_modified())}")
print(f"{rex.speak()} on {zoo.Dog.LEGS} legs")

# A broken edit is rolled back: the previous definition keeps working.
(class_root / "zoo" / "Animal.py").write_text("static.LEGS = 'many'\nraise ValueError('oops')\n")
try:
    system.load_class("zoo.Animal")
except ClassRuntimeError as e:
    print(f"\nReload failed: {e}")
print(f"Still {zoo.Animal.LEGS} legs: {rex.speak()}")
