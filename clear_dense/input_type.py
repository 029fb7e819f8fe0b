class InputType:
    """Describes the shape of the samples fed to the first layer.

    A dense network only needs the flattened size, but image-like inputs can be
    described by width, height and channel count; the size is then their product.
    """

    def __init__(self, input_size: int):
        if input_size <= 0:
            raise ValueError(f"Input size must be positive, got {input_size}")
        self.input_size = int(input_size)
        self.width = None
        self.height = None
        self.channel = None

    @classmethod
    def image(cls, width: int, height: int, channel: int = 1) -> 'InputType':
        """Creates a descriptor for ``width x height x channel`` inputs."""
        input_type = cls(width * height * channel)
        input_type.width = width
        input_type.height = height
        input_type.channel = channel
        return input_type

    def __eq__(self, other):
        if not isinstance(other, InputType):
            return NotImplemented
        return (self.input_size, self.width, self.height, self.channel) == \
               (other.input_size, other.width, other.height, other.channel)

    def __hash__(self):
        return hash((self.input_size, self.width, self.height, self.channel))

    def __repr__(self):
        if self.width is None:
            return f"InputType(input_size={self.input_size})"
        return (f"InputType(width={self.width}, height={self.height}, "
                f"channel={self.channel}, input_size={self.input_size})")
